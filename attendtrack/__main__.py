"""
Run attendtrack as a module: `python -m attendtrack upload timetable.png`.

Same commands as the `attendtrack` console script (see attendtrack.cli).
"""

from attendtrack.cli import main

if __name__ == "__main__":
    main()
