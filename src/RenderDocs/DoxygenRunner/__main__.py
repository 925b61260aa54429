"""Allow ``python -m RenderDocs.DoxygenRunner``."""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
