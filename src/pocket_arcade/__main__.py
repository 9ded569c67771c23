from pocket_arcade.main import main

main()
