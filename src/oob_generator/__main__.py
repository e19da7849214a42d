from __future__ import annotations

from oob_generator.cli import main

raise SystemExit(main())
