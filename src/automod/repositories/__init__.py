"""SQL repositories used by ``SQLiteAutomodStore``. Each takes a connection per call."""
