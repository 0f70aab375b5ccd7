#!/usr/bin/env python
"""
Demo Data Generation CLI

Seeds students, batches with their content trees, and enrollments.
Supports configuration via YAML file or command-line arguments (CLI takes precedence).
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path
import yaml

# Add parent directory to path to import teachhub modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from teachhub.services.data_generator import DemoDataGenerator

DEFAULTS = {
    "num_batches": 4,
    "sections_per_batch": 3,
    "lessons_per_section": 4,
    "notes_per_lesson": 2,
    "num_students": 30,
    "live_ratio": 0.25,
}


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file"""
    try:
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"Warning: Config file not found at {config_path}, using defaults")
        return {}
    except yaml.YAMLError as e:
        print(f"Error parsing config file: {e}")
        sys.exit(1)


def parse_subjects(subjects_str: str) -> list:
    """Parse comma-separated subject list"""
    return [s.strip() for s in subjects_str.split(',') if s.strip()]


def resolve_settings(args, config: dict) -> dict:
    """Merge CLI args over config file values over defaults"""
    settings = {}
    for key, default in DEFAULTS.items():
        value = getattr(args, key, None)
        settings[key] = value if value is not None else config.get(key, default)

    if args.subjects_list:
        settings["subjects_list"] = parse_subjects(args.subjects_list)
    else:
        settings["subjects_list"] = config.get("subjects_list")

    settings["seed"] = args.seed if args.seed is not None else config.get("seed")
    return settings


async def run_generation(args):
    """Execute data generation with given arguments"""
    config_path = args.config or str(Path(__file__).parent.parent / "config" / "demo_data_config.yaml")
    settings = resolve_settings(args, load_config(config_path))

    if settings["num_batches"] < 1 or settings["num_students"] < 0:
        print("Error: num_batches must be positive and num_students non-negative")
        sys.exit(1)

    if not 0 <= settings["live_ratio"] <= 1:
        print("Error: live_ratio must be between 0 and 1")
        sys.exit(1)

    print("=" * 60)
    print("TeachHub Demo Data Generator")
    print("=" * 60)
    print(f"Batches: {settings['num_batches']}")
    print(f"Sections per batch: {settings['sections_per_batch']}")
    print(f"Lessons per section: {settings['lessons_per_section']}")
    print(f"Notes per lesson: {settings['notes_per_lesson']}")
    print(f"Students: {settings['num_students']}")
    print("=" * 60)

    if args.dry_run:
        sections = settings["num_batches"] * settings["sections_per_batch"]
        lessons = sections * settings["lessons_per_section"]
        print("\n[DRY RUN MODE] Would generate:")
        print(f"  - {sections:,} sections")
        print(f"  - {lessons:,} lessons (~{int(lessons * settings['live_ratio']):,} live)")
        print(f"  - {lessons * settings['notes_per_lesson']:,} notes")
        print(f"  - up to {settings['num_students'] * 3:,} enrollments")
        print("\nNo database writes performed.")
        return

    generator = DemoDataGenerator(**settings)

    try:
        results = await generator.generate_all_data()
    except Exception as e:
        print(f"\nError during data generation: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

    print("\n" + "=" * 60)
    print("Generation Complete!")
    print("=" * 60)
    print(f"Duration: {results['duration_seconds']:.2f} seconds")
    print(f"Admin: {results['admin_email']}")
    print(f"Students: {results['students_count']:,}")
    print(f"Batches: {results['batches_count']:,}")
    print(f"Sections: {results['sections_count']:,}")
    print(f"Lessons: {results['lessons_count']:,}")
    print(f"Notes: {results['notes_count']:,}")
    print(f"Enrollments: {results['enrollments_count']:,}")
    print("=" * 60)


def main():
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Seed a TeachHub database with demo content and students",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Use default configuration
  python scripts/generate_demo_data.py

  # Bigger dataset, reproducible
  python scripts/generate_demo_data.py --num-batches 8 --num-students 200 --seed 42

  # Dry run to preview generation plan
  python scripts/generate_demo_data.py --dry-run
        """
    )

    parser.add_argument("--config", type=str, help="Path to YAML config (default: config/demo_data_config.yaml)")
    parser.add_argument("--num-batches", dest="num_batches", type=int, help="Number of batches")
    parser.add_argument("--sections-per-batch", dest="sections_per_batch", type=int, help="Sections in each batch")
    parser.add_argument("--lessons-per-section", dest="lessons_per_section", type=int, help="Lessons in each section")
    parser.add_argument("--notes-per-lesson", dest="notes_per_lesson", type=int, help="Notes on each lesson")
    parser.add_argument("--num-students", dest="num_students", type=int, help="Number of student accounts")
    parser.add_argument("--live-ratio", dest="live_ratio", type=float, help="Share of lessons created as live classes")
    parser.add_argument("--subjects-list", type=str, help="Comma-separated list of batch subjects")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument("--dry-run", action="store_true", help="Preview generation plan without writing to database")

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    asyncio.run(run_generation(args))


if __name__ == "__main__":
    main()
