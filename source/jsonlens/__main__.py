from jsonlens.cli import main

raise SystemExit(main())
