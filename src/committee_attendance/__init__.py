"""Committee Attendance package.

Feature modules (users, committees, meetings, attendance, reports) each carry
a domain model, a repository interface with its MySQL implementation, a
service holding the business rules and a thin Flask controller.
"""
