"""
Entry point for running the scheduler as a module.

Usage:
    python -m timetabler validate dataset.json
    python -m timetabler generate dataset.json -o timetable.json
    python -m timetabler cross-check dataset.json --timetable timetable.json
    python -m timetabler sample -o dataset.json
"""

from timetabler.cli import main

if __name__ == "__main__":
    main()
