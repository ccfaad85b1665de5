# ========================
# file: colony_planner/world/__init__.py
# ========================
