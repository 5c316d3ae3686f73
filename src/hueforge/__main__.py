from hueforge.cli import main

raise SystemExit(main())
