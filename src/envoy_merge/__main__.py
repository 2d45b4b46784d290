from envoy_merge.cli import main

main()
