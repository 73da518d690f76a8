from gbp.cli.app import main

main()
