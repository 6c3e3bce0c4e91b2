"""
================================================================================
PONTO DE ENTRADA DO LOGCONV
================================================================================

Permite rodar o conversor como módulo:

```bash
python -m logconv.src.main convert ./logs ./generated
```

A lógica real vive em `cli/main.py`; este arquivo só delega.
"""

from __future__ import annotations

from .cli.main import main

if __name__ == "__main__":
    main()
