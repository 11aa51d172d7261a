"""Bus manifest package.

Feature modules (manifests, users) with a thin Flask controller layer over
service/repository layers, wired together by ``container.build_container``.
"""
