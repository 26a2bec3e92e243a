from logbench.cli import main

main()
