from mtrace_analyzer.analyze_mtrace import main

main()
