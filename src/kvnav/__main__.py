from kvnav.cli import main

main()
