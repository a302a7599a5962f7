from xlshift.cli import main

main()
