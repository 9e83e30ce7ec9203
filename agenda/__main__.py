from agenda.server import main

main()
