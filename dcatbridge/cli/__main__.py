from dcatbridge.cli.main import main

main()
