"""
HR Desk Backend - Services Layer
================================

What:  Business rules between the routes (HTTP) and the state they act on.
How:   Routes hand services an AsyncSession (attendance) or the in-memory
       RecruitmentStore (recruitment); services validate, mutate and return
       domain objects, raising HrDeskError subclasses on failure.

Service Inventory:
    - AttendanceService: clock events and daily/monthly summaries
    - RecruitmentStore: in-memory accounts, candidates and settings
    - recruitment_seed: deterministic mock dataset for the store
    - RecruitmentService: auth, accounts, settings, candidates, interviews
    - metrics_service: period filters and recruiting metrics
"""
