from contentdb.cli.main import main

main()
