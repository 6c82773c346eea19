from tfstate_bootstrap.cli.app import main

main()
