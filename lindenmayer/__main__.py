from lindenmayer.cli import main

raise SystemExit(main())
