"""
HTTP front end for the ranking pipeline (Cloud Functions / functions-framework).

Run locally from the repository root:
  functions-framework --source service/main.py --target rank_network
"""
