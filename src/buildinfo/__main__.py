from buildinfo.hook import main

raise SystemExit(main())
