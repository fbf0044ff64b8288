from incident_reporter.cli import main

raise SystemExit(main())
