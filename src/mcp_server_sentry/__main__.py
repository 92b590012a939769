from mcp_server_sentry import main

main()
