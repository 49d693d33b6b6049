from uwiki_cli.app import main

main()
