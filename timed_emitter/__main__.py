from timed_emitter.app import main

main()
