from pixelmorph.cli import main

main()
