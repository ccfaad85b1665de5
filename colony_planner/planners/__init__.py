# ========================
# file: colony_planner/planners/__init__.py
# ========================
