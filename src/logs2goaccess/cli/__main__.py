from logs2goaccess.cli.main import main

main()
