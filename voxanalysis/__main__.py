from voxanalysis.cli import main

main()
