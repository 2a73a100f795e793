"""
HR Desk Backend - API Routes Package
=====================================

Routes are thin: they extract request data, call a service and shape the
response. Business rules live in hrdesk.services.

Route Inventory:
    attendance.py   /api/ping, /api/attendance/*         (attendance app)
    recruitment.py  /api/ping, /api/recruitment/*        (recruitment app)
    admin.py        /api/recruitment/admin/*             (recruitment app)
    health.py       /health                              (both apps)
"""
