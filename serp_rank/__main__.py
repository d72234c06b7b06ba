from serp_rank.cli import main

raise SystemExit(main())
