from .readers import DataReadError, read_employee_records
from .writers import DataWriteError, write_rank_table

__all__ = ["DataReadError", "DataWriteError", "read_employee_records", "write_rank_table"]
