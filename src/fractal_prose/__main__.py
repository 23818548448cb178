"""Entry point for ``python -m fractal_prose``."""

from .cli import main

raise SystemExit(main())
