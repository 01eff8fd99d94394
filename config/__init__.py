# config package — study-wide constants for the VI-RADS reader study.
#
# Sub-modules:
#   study_params.py  — pathology stages, score scales, experience levels,
#                      and default analysis parameters
#
# Path constants live in each package's own config.py (src/cases/config.py,
# src/analysis/config.py) so they resolve relative to the project root.
