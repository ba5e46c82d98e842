from __future__ import annotations

from rmd.main import main


if __name__ == "__main__":
    raise SystemExit(main())
