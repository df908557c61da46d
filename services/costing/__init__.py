"""Cost models behind the business case.

- inputs.py: operational/strategic inputs and boundary validation
- development.py: CAPEX from squad composition
- operational.py: AS-IS manual cost and strategic adjustments
- infrastructure.py: TO-BE running cost (licenses, infra, maintenance, AI)
"""
