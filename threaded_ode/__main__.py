from threaded_ode.compare_execution import main

raise SystemExit(main())
