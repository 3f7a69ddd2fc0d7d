from envx.cli import main

raise SystemExit(main())
