from shopbot.cli import main

main()
