from breezy.cli.app import main

main()
