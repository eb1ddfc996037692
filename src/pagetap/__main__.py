"""Run pagetap with `python -m pagetap`."""

from pagetap import main

if __name__ == "__main__":
    main()
