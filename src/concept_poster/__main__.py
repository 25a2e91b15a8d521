"""Allow `python -m concept_poster`."""

from .cli import main

if __name__ == "__main__":
    main()
