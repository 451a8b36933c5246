# server/run.py

import os
from inkwell import create_app

env = os.environ.get("FLASK_ENV", "development")
app = create_app(env)

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    host = os.environ.get("HOST", "0.0.0.0")
    debug = env == "development"

    print(f"\n[Inkwell] Content API ({env}) on http://{host}:{port}")
    print(f"[Inkwell] Media storage: {'configured' if app.media.configured else 'disabled, uploads will fail'}")
    print(f"[Inkwell] Cache: {'redis' if app.cache.configured else 'none'}\n")
    print("Note: For production, use: gunicorn --chdir server wsgi:app\n")

    app.run(host=host, port=port, debug=debug, threaded=True)
