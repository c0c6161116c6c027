"""History stores for command execution records: in memory and in SQLite."""