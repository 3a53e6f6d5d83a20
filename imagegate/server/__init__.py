"""Client address detection and WSGI middleware."""