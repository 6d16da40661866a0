from dialogue_studio.cli import main

main()
