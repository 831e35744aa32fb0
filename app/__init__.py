"""
Campus Placement Portal
Internship placement backend for a college campus.

Architecture:
- MongoDB: Students, mentors, admins, recruiters, internships, applications, audit log
- Services: Eligibility scoring, internship workflow, application state machine
- Web3Forms: Status-change emails to students
"""

__version__ = "1.0.0"
