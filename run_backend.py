"""
Backend startup script for the Supasupp assessment API.
Run this script to start the Flask server.
"""
import os
import sys

# Add project root to Python path
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)

from supasupp.application import create_app
from supasupp.config.config import DEBUG, PORT

app = create_app()

if __name__ == '__main__':
    print("=" * 60)
    print("Starting Supasupp Assessment Backend Server")
    print("=" * 60)
    print(f"Server: http://localhost:{PORT}")
    print(f"Health: http://localhost:{PORT}/health")
    print(f"Debug Mode: {DEBUG}")
    print("=" * 60)
    print("\nPress CTRL+C to quit\n")

    app.run(
        host='127.0.0.1',
        port=PORT,
        debug=DEBUG,
        threaded=True
    )
