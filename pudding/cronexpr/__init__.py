"""Cron time expressions: parsing and next-match calculation."""