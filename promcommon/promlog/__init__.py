"""Leveled logfmt or JSON loggers and their command-line options."""