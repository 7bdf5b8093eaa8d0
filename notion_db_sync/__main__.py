from notion_db_sync.cli import main

main()
