"""
CLI subcommands.

Commands:
- load: Write points from a JSON file
- query: Run radius and rectangle queries
- table: Print or execute the create-table request
"""
