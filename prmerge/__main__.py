from prmerge.cli import main

main()
