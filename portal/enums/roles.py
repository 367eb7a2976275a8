from enum import Enum


class EmployeeRole(str, Enum):
    user = "user"
    admin = "admin"
    procurement = "procurement"
