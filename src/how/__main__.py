from how import cli

raise SystemExit(cli.main())
