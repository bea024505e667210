# app/models/enums/user_role.py
import enum


class UserRole(str, enum.Enum):
    customer = "customer"
    supplier = "supplier"
    admin = "admin"
