"""
================================================================================
CLI `logconv`
================================================================================

Comandos (click) com saída formatada (rich):

```bash
logconv init                          # .logconv/config.yaml
logconv detect login.log              # dialeto e transações de um log
logconv convert ./logs ./generated    # converte todos os logs
logconv explain E1004                 # o que significa um código
```
"""

from .main import cli

__all__ = ["cli"]
