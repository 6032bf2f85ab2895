class LiveBlock:

    def __init__( self, handle, size, caller ):
        self.handle = handle
        self.size = size
        self.caller = caller

    def __repr__(self):
        return f"LiveBlock( {self.handle}, {self.size}, {self.caller} )"


class LiveBlockTable:

    """
    Blocks allocated and not freed yet, keyed by handle.
    Only the most recent allocation of a handle is kept.
    """

    def __init__(self):
        self.blocks = {}
        self.num_overwritten = 0
        self.num_unknown_frees = 0

    def record( self, handle, size, caller ):

        # last write wins
        if handle in self.blocks:
            self.num_overwritten += 1

        self.blocks[handle] = LiveBlock( handle, size, caller )

    def release( self, handle ):

        if handle not in self.blocks:
            self.num_unknown_frees += 1
            return

        del self.blocks[handle]

    def get( self, handle ):
        return self.blocks.get(handle)

    def items(self):
        return list( self.blocks.items() )

    def __contains__( self, handle ):
        return handle in self.blocks

    def __len__(self):
        return len(self.blocks)
