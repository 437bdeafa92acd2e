from isogas.cli.main import main

main()
