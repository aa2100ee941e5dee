from context_awareness import main

main()
