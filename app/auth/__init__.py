"""
Admin authentication.

- backend.py: thin wrapper over the Supabase auth client + the admin flag lookup.
- bootstrap.py: session bootstrap / admin status state machine (no Streamlit imports).
- guard.py: route guard rendering (spinner, sign-in, access denied).
"""
