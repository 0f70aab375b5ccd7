"""
Demo Data Generator Service

Seeds a realistic TeachHub dataset: students, batches with sections, lessons
(recorded and live) and notes, and enrollments in every status. Records are
generated in memory first and then bulk inserted.
"""

import uuid
import random
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Dict, Any, Optional
from faker import Faker
from sqlalchemy import insert

from teachhub import config
from teachhub.database import AsyncSessionLocal
from teachhub.models.batch import Batch
from teachhub.models.enrollment import Enrollment
from teachhub.models.lesson import Lesson, LIVE_PLATFORMS
from teachhub.models.note import Note
from teachhub.models.section import Section
from teachhub.models.user import User
from teachhub.services.bootstrap import ensure_teacher_admin, hash_password

fake = Faker()

logger = logging.getLogger(__name__)

SUBJECTS = [
    "Algebra",
    "Geometry",
    "Physics",
    "Chemistry",
    "Biology",
    "English Literature",
    "World History",
    "Computer Science",
    "Economics",
]

# Status mix for generated enrollments
ENROLLMENT_STATUS_WEIGHTS = {
    "approved": 0.65,
    "pending": 0.25,
    "rejected": 0.10,
}

DEMO_STUDENT_PASSWORD = "student-demo"


class DemoDataGenerator:
    """Builds one content tree per batch and enrolls students into them"""

    def __init__(
        self,
        num_batches: int = 4,
        sections_per_batch: int = 3,
        lessons_per_section: int = 4,
        notes_per_lesson: int = 2,
        num_students: int = 30,
        live_ratio: float = 0.25,
        subjects_list: Optional[List[str]] = None,
        seed: Optional[int] = None,
    ):
        self.num_batches = num_batches
        self.sections_per_batch = sections_per_batch
        self.lessons_per_section = lessons_per_section
        self.notes_per_lesson = notes_per_lesson
        self.num_students = num_students
        self.live_ratio = live_ratio
        self.subjects = subjects_list or SUBJECTS

        if seed is not None:
            random.seed(seed)
            Faker.seed(seed)

        self.student_data: List[Dict[str, Any]] = []
        self.batch_data: List[Dict[str, Any]] = []
        self.section_data: List[Dict[str, Any]] = []
        self.lesson_data: List[Dict[str, Any]] = []
        self.note_data: List[Dict[str, Any]] = []
        self.enrollment_data: List[Dict[str, Any]] = []

        logger.info(
            f"Initialized DemoDataGenerator: {num_batches} batches, "
            f"{sections_per_batch}x{lessons_per_section}x{notes_per_lesson} content, {num_students} students"
        )

    def generate_students(self) -> List[Dict[str, Any]]:
        """Student accounts, each with its own bearer token"""
        password_hash = hash_password(DEMO_STUDENT_PASSWORD)
        students = []
        for _ in range(self.num_students):
            students.append({
                "id": uuid.uuid4(),
                "name": fake.name(),
                "email": fake.unique.email(),
                "password_hash": password_hash,
                "role": "student",
                "access_token": uuid.uuid4().hex,
            })

        self.student_data = students
        logger.info(f"Generated {len(students)} student records")
        return students

    def generate_batches(self, instructor_id: uuid.UUID) -> List[Dict[str, Any]]:
        subjects = random.sample(self.subjects, min(self.num_batches, len(self.subjects)))
        while len(subjects) < self.num_batches:
            subjects.append(random.choice(self.subjects))

        batches = []
        for subject in subjects:
            level = random.choice([101, 201, 301])
            batches.append({
                "id": uuid.uuid4(),
                "title": f"{subject} {level}",
                "description": fake.paragraph(nb_sentences=3),
                "thumbnail_url": f"https://picsum.photos/seed/{fake.slug()}/640/360",
                "thumbnail_storage_key": None,
                "instructor_id": instructor_id,
            })

        self.batch_data = batches
        logger.info(f"Generated {len(batches)} batch records")
        return batches

    def generate_sections(self) -> List[Dict[str, Any]]:
        sections = []
        for batch in self.batch_data:
            for position in range(self.sections_per_batch):
                sections.append({
                    "id": uuid.uuid4(),
                    "title": f"Module {position + 1}: {fake.catch_phrase()}",
                    "order": position,
                    "batch_id": batch["id"],
                })

        self.section_data = sections
        logger.info(f"Generated {len(sections)} section records")
        return sections

    def _recorded_lesson(self, section_id: uuid.UUID, position: int) -> Dict[str, Any]:
        key = f"videos/{uuid.uuid4().hex}.mp4"
        return {
            "id": uuid.uuid4(),
            "title": fake.sentence(nb_words=4).rstrip("."),
            "description": fake.paragraph(nb_sentences=2),
            "section_id": section_id,
            "order": position,
            # 5-60 minutes, in seconds
            "duration": random.randint(5, 60) * 60,
            "video_url": f"https://cdn.example.com/{key}",
            "video_storage_key": key,
            "is_live_enabled": False,
            "live_platform": None,
            "live_join_url": None,
            "live_start_at": None,
            "live_status": None,
        }

    def _live_lesson(self, section_id: uuid.UUID, position: int) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        start_at = now + timedelta(days=random.randint(-14, 14), hours=random.randint(0, 23))
        if start_at > now:
            live_status = "scheduled"
        else:
            live_status = random.choices(["ended", "live"], weights=[0.85, 0.15])[0]

        platform = random.choice(LIVE_PLATFORMS)
        return {
            "id": uuid.uuid4(),
            "title": f"Live: {fake.sentence(nb_words=3).rstrip('.')}",
            "description": None,
            "section_id": section_id,
            "order": position,
            "duration": random.choice([45, 60, 90]) * 60,
            "video_url": None,
            "video_storage_key": None,
            "is_live_enabled": True,
            "live_platform": platform,
            "live_join_url": fake.url(),
            "live_start_at": start_at,
            "live_status": live_status,
        }

    def generate_lessons(self) -> List[Dict[str, Any]]:
        """Mix of recorded and live lessons, `live_ratio` of them live"""
        lessons = []
        for section in self.section_data:
            for position in range(self.lessons_per_section):
                if random.random() < self.live_ratio:
                    lessons.append(self._live_lesson(section["id"], position))
                else:
                    lessons.append(self._recorded_lesson(section["id"], position))

        self.lesson_data = lessons
        logger.info(f"Generated {len(lessons)} lesson records")
        return lessons

    def generate_notes(self) -> List[Dict[str, Any]]:
        notes = []
        for lesson in self.lesson_data:
            for _ in range(self.notes_per_lesson):
                key = f"notes/{uuid.uuid4().hex}.pdf"
                notes.append({
                    "id": uuid.uuid4(),
                    "title": fake.sentence(nb_words=3).rstrip("."),
                    "description": fake.sentence(),
                    "file_url": f"https://cdn.example.com/{key}",
                    "storage_key": key,
                    "lesson_id": lesson["id"],
                })

        self.note_data = notes
        logger.info(f"Generated {len(notes)} note records")
        return notes

    def generate_enrollments(self) -> List[Dict[str, Any]]:
        """Each student requests 1-3 batches; at most one row per (student, batch)"""
        statuses = list(ENROLLMENT_STATUS_WEIGHTS)
        weights = [ENROLLMENT_STATUS_WEIGHTS[s] for s in statuses]

        enrollments = []
        for student in self.student_data:
            count = min(len(self.batch_data), random.randint(1, 3))
            for batch in random.sample(self.batch_data, count):
                enrollments.append({
                    "id": uuid.uuid4(),
                    "user_id": student["id"],
                    "batch_id": batch["id"],
                    "status": random.choices(statuses, weights=weights)[0],
                })

        self.enrollment_data = enrollments
        logger.info(f"Generated {len(enrollments)} enrollment records")
        return enrollments

    def generate_in_memory(self, instructor_id: uuid.UUID) -> None:
        self.generate_students()
        self.generate_batches(instructor_id)
        self.generate_sections()
        self.generate_lessons()
        self.generate_notes()
        self.generate_enrollments()

    async def batch_insert(self, session, model_class, data: List[Dict[str, Any]], batch_size: int = 1000):
        """Insert data in chunks of batch_size"""
        if not data:
            return

        total_batches = (len(data) + batch_size - 1) // batch_size

        for i in range(0, len(data), batch_size):
            chunk = data[i:i + batch_size]
            await session.execute(insert(model_class), chunk)
            logger.debug(f"Inserted {model_class.__tablename__} batch {(i // batch_size) + 1}/{total_batches}")

        await session.commit()

    async def generate_all_data(self, session_factory=AsyncSessionLocal) -> Dict[str, Any]:
        """Main entry point: seed the admin if needed, then write every generated record"""
        start_time = datetime.now()
        logger.info("=== Starting Demo Data Generation ===")

        async with session_factory() as session:
            admin = await ensure_teacher_admin(
                session,
                email=config.TEACHER_EMAIL or "teacher@teachhub.local",
                password=config.TEACHER_PASSWORD or "teacher-demo",
            )

            self.generate_in_memory(admin.id)

            logger.info("Inserting students...")
            await self.batch_insert(session, User, self.student_data)

            logger.info("Inserting content tree...")
            await self.batch_insert(session, Batch, self.batch_data)
            await self.batch_insert(session, Section, self.section_data)
            await self.batch_insert(session, Lesson, self.lesson_data)
            await self.batch_insert(session, Note, self.note_data)

            logger.info("Inserting enrollments...")
            await self.batch_insert(session, Enrollment, self.enrollment_data)

        duration = (datetime.now() - start_time).total_seconds()
        logger.info(f"=== Demo Data Generation Complete in {duration:.2f}s ===")

        return {
            "duration_seconds": duration,
            "admin_email": admin.email,
            "students_count": len(self.student_data),
            "batches_count": len(self.batch_data),
            "sections_count": len(self.section_data),
            "lessons_count": len(self.lesson_data),
            "notes_count": len(self.note_data),
            "enrollments_count": len(self.enrollment_data),
        }
