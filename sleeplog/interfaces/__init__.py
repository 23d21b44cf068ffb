"""層間インターフェース定義。

クエリ層・API層はこのパッケージの抽象クラスにのみ依存する。
sleeplog/store/ の実装に直接依存してはならない。
"""
